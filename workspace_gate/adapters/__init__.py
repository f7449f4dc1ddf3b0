"""Adapters exposing remote resource graphs to the permission engine."""

from .drive import DriveFolderGraph

__all__ = ["DriveFolderGraph"]
