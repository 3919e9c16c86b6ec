"""
Poster derivative engine.

Modules:
  codec        - WebP/PNG decode and encode behind one interface
  derivatives  - keyed file store and the fullres -> thumbnail stages
  base83       - base83 digits shared by the placeholder formats
  palette      - median-cut palette extraction (accent color)
  placeholder  - blurhash placeholder with accent suffix
  presenter    - presenter card composition with title fitting
  cache_key    - random keys naming each series' derivatives
"""
