"""Models module initialization - import all models here."""
from photon.models.user import User
from photon.models.image import Image
from photon.models.pair import Pair, PairStatus
from photon.models.share import Share

__all__ = ["User", "Image", "Pair", "PairStatus", "Share"]
