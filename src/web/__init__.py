"""
Web layer: FastAPI routes over a DetectionSession.
"""
