"""Public conversion API.

Progressive API disclosure:
- Level 1: string helpers - xml_to_json(), json_to_xml()
- Level 2: convert() with explicit direction, configuration and result object
- Level 3: convert_file() with direction and output name inference
"""

from .converter import convert, convert_file, json_to_xml, xml_to_json

__all__ = [
    "convert",
    "convert_file",
    "json_to_xml",
    "xml_to_json",
]
