"""Compiler interfaces for emitting Nix flake sources."""

from .emit_flake import FLAKE_INPUTS, FLAKE_TEMPLATE, emit_flake, write_flake

__all__ = ["FLAKE_INPUTS", "FLAKE_TEMPLATE", "emit_flake", "write_flake"]
