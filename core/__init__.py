"""
Core pipeline modules for the YouTube talk summarizer

This package contains one module per pipeline stage:
- timecode.py: "HH:MM:SS" expressions → seconds
- artifacts.py: artifact directories, names and the existence cache
- download.py: YouTube URL → source video file
- segment.py: source video → talk clip + audio extract
- transcribe.py: audio extract → transcript text (Amazon Transcribe)
- process.py: transcript → description + article (OpenAI)
"""
