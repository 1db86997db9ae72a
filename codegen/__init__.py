"""Guided Component Forge — Webflow code component generation pipeline."""
