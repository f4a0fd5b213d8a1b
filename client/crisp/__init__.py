"""Crisp practice client: microphone capture, upload and text feedback."""
