"""
Crop recommendation engine: turns a farmer's selection into a ranked list
of locally grown crops.

Modules
-------
scorer   : IndexTriple dataclass + rolling_hash32() + derive_indices()
           — pure functions, no I/O.
ranker   : RankedCrop dataclass + filter_candidates() + rank_by_profit()
           + recommend() / recommend_with_details().
session  : RecommendationSession — current selection and derived results.
"""
