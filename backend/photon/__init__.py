"""Photon: image storage, friend pairs and per-image sharing."""
