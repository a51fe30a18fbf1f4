"""OCR Post-Processing Engine.

Derives structured facts from raw OCR text: the ending balance of a
financial statement with its date, and the most likely document
sub-category based on keyword and vendor-pattern matching.
"""
