"""Video composition adapters."""

from ad_engine.adapters.composer.base import ComposedVideo, VideoComposer
from ad_engine.adapters.composer.moviepy_composer import MoviePyComposer
from ad_engine.adapters.composer.stub import StubVideoComposer

__all__ = ["ComposedVideo", "MoviePyComposer", "StubVideoComposer", "VideoComposer"]
