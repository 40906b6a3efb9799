"""
Song generation module for turning fantasy-football rosters into trash talk songs.

This package provides the background pipeline that:
1. Normalizes a generation request and fingerprints it for deduplication
2. Reuses the artifacts of an identical, already generated song when possible
3. Renders templated lyrics and filters them for the chosen rating
4. Submits the lyrics to the music-generation provider and polls for the result
5. Cuts a short faded preview from the full track
6. Builds an LRC lyric-timing file
7. Stores every artifact and records the job outcome

Components:
- tasks.py: Celery task, enqueue entry point and pipeline factory
- pipeline.py: Job state machine
- normalize.py: Request normalization and content hashing
- lyrics.py: Lyrics templating and content filtering
- generation.py: Generation provider client and offline stub
- audio.py: Preview clip post-processing
- lrc.py: Lyric timing builder and parser
- store.py: Job stores
- storage.py: Object storage over Django storage backends
- states.py: Job lifecycle rules
- exceptions.py: Custom exceptions
- config/: Lyric templates
"""

__version__ = '1.0.0'
