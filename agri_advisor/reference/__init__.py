"""
Static reference datasets and crop-name normalisation.

Modules
-------
aliases : CROP_ALIASES + canonical_crop_key() + lookup_by_crop_name().
loader  : ReferenceData bundle + parse_*/load_* functions for the five
          JSON files under ``config/data``.
"""
