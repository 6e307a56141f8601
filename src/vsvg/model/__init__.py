"""
The MODEL layer contains the retained geometric data structures.
It has NO knowledge of SVG markup or of any viewer.
Curves are stored exactly; polylines only exist in flattened snapshots.
"""
