"""
Features composed of curved planes and their submodel dispatch.

Submodules
----------
_segments : Segment, ModelArena, SegmentTable, section assembly
_dispatch : Ordered submodel application and section blending
_feature  : SubductingPlate, Fault and the feature registry
"""

from slabfield.features._segments import (
    Segment,
    ModelArena,
    SegmentTable,
    assemble_sections,
)
from slabfield.features._dispatch import apply_models, blend, blend_grains, dispatch
from slabfield.features._feature import (
    feature_types,
    CurvedPlaneFeature,
    SubductingPlate,
    Fault,
)

__all__ = [
    'Segment', 'ModelArena', 'SegmentTable', 'assemble_sections',
    'apply_models', 'blend', 'blend_grains', 'dispatch',
    'feature_types', 'CurvedPlaneFeature', 'SubductingPlate', 'Fault',
]
