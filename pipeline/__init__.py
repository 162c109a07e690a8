"""
Document OCR pipeline.

ocr_pages - submit a document to external OCR providers in fallback order and
normalize whichever answer succeeds into canonical pages.
"""
