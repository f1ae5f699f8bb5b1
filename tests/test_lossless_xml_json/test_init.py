"""Test module for lossless_xml_json package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import lossless_xml_json

    # Assert
    assert lossless_xml_json is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import lossless_xml_json

    # Assert
    assert isinstance(lossless_xml_json.__version__, str)
    assert lossless_xml_json.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import lossless_xml_json

    # Assert
    assert lossless_xml_json.__author__ == "Lossless XML JSON Team"


def test_package_all_exports() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import lossless_xml_json

    # Assert
    for name in lossless_xml_json.__all__:
        assert hasattr(lossless_xml_json, name), name
    assert "xml_to_json" in lossless_xml_json.__all__
    assert "json_to_xml" in lossless_xml_json.__all__
