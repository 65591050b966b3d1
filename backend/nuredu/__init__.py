"""Application package for the nuredu curriculum backend.

This package exposes the FastAPI application (`main`), its service,
repository and model modules, and the curriculum client layer used by
administrative tooling: the curriculum tree store (`curriculum`), the
lesson form (`lesson_form`), the lesson gateway (`gateway`) and the
lesson directory view (`directory`). Individual modules contain the
concrete implementations and documentation.
"""
