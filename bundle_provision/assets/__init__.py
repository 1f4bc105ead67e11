"""Packaged-asset location; the build places the bundled dictionary here."""
