"""Trainer services: transcription, speech output, playback handles, session wiring."""
