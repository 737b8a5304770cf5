"""Test the main package initialization."""


def test_import_main_package() -> None:
    """Test that the main package can be imported without errors."""
    import schemacheck

    assert schemacheck.__version__ == "0.1.0"


class TestPackageStructure:
    """Test the package structure and imports."""

    def test_core_module_import(self) -> None:
        """Test that core module can be imported."""
        from schemacheck import core  # noqa: F401

    def test_diff_module_import(self) -> None:
        """Test that diff module can be imported."""
        from schemacheck import diff  # noqa: F401

    def test_usage_module_import(self) -> None:
        """Test that usage module can be imported."""
        from schemacheck import usage  # noqa: F401

    def test_validation_module_import(self) -> None:
        """Test that validation module can be imported."""
        from schemacheck import validation  # noqa: F401

    def test_cli_module_import(self) -> None:
        """Test that CLI module can be imported."""
        from schemacheck import cli  # noqa: F401

    def test_api_module_import(self) -> None:
        """Test that API module can be imported."""
        from schemacheck import api  # noqa: F401
