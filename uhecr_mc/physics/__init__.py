"""Physics module: photon backgrounds, photo-pion sampling, loss tables."""

from uhecr_mc.physics.photon_field import (
    PhotonField,
    TabularPhotonField,
    BlackbodyPhotonField,
    CMB,
    photon_field_from_name,
)
from uhecr_mc.physics.photon_sampling import PhotonFieldSampling
from uhecr_mc.physics.loss_table import InteractionLossTable

__all__ = [
    "PhotonField",
    "TabularPhotonField",
    "BlackbodyPhotonField",
    "CMB",
    "photon_field_from_name",
    "PhotonFieldSampling",
    "InteractionLossTable",
]
