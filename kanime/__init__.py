"""
Kanime poster pipeline.

Turns an uploaded poster into the derivative set served by the catalog:
full-resolution copy, 310x468 thumbnail, blurhash placeholder with accent
color, and the composed presenter card.
"""
