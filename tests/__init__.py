"""
Camera discovery test suite

Structure:
- unit/: parsers, coalescer, cache, fetcher, service, viewer
- integration/: end-to-end viewport flow; live twipcam check (opt-in)
- fixtures/html/: saved list and camera pages
"""
