"""Highlight collection, style resolution and segmentation.

Contains:
- source_iface: the AnnotationSource Protocol and an in-memory span source
- collection: layer tagging and effective priority bands
- resolver: per-position style resolution with a per-request cache
- builder: sliced segment builder and CodeModel construction
"""
