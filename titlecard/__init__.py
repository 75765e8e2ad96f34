"""titlecard - find title card frames in videos and name episodes from them."""

__version__ = "1.0.0"

from titlecard.catalog import Episode, load_catalog
from titlecard.color_classifier import RgbFrame, classify
from titlecard.config import OcrConfig, ScanConfig, load_config
from titlecard.episode_matcher import closest_episode, rank_episodes
from titlecard.frame_sampler import should_sample
from titlecard.processor import process_video_files
from titlecard.title_card_scanner import MatchResult, find_title_card, save_title_card, scan_stream
from titlecard.title_reader import read_title

__all__ = [
    'Episode',
    'load_catalog',
    'RgbFrame',
    'classify',
    'OcrConfig',
    'ScanConfig',
    'load_config',
    'closest_episode',
    'rank_episodes',
    'should_sample',
    'process_video_files',
    'MatchResult',
    'find_title_card',
    'save_title_card',
    'scan_stream',
    'read_title',
]
