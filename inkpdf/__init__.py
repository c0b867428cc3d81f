"""Render PDF pages to raster surfaces, draw on them, save them as a new PDF.

Packages:
- inkpdf.docs: data model, MuPDF decoder/encoder, base64 payloads
- inkpdf.input: pointer/touch events and coordinate mapping
- inkpdf.render: surfaces and freehand stroke capture
- inkpdf.pipeline: page rendering, document session, export, controller
"""

__version__ = "0.1.0"
