"""
artiscan - Screen-reading inventory scanner for Genshin Impact artifacts.

Packages:
    - artiscan.ocr: Field recognizer (transformer model, CTC decoding)
    - artiscan.parsing: Recognized strings to typed item records
    - artiscan.scanner: Scan state machine and session
"""

__version__ = "0.3.0"
