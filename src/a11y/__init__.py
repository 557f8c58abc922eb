from crawler.scheduler import analyze, analyze_sync, crawl, crawl_sync

from .__version__ import __version__
from .cli import main

__all__ = [
	"analyze",
	"analyze_sync",
	"crawl",
	"crawl_sync",
	"main",
	"__version__",
]
