"""
SVG Importer
============
Translates SVG markup into a Document without flattening any curve.

Why is this package needed?
---------------------------
1. Grammar: the path-data, transform and length mini-languages of SVG are
   parsed here (one module each) so they can be tested in isolation.
2. Resolution: transforms, viewports and inherited presentation attributes
   are resolved at import time; the Document only stores document-space
   geometry.
3. Isolation: a broken element becomes a PathSkipped record, never a broken
   Document.
"""
