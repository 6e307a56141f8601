"""
Geometry Operations
===================
Pure functions over the retained document model.

Why is this package needed?
---------------------------
1. Flattening: curves stay exact in the model; polylines are produced here on
   demand and never cached on the source objects.
2. Measurement: bounding boxes and lengths used for cropping and view fitting.

Note: nothing in this package mutates a Path, Layer or Document.
"""
