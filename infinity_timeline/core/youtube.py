import re
from typing import Optional

YOUTUBE_HOSTS = ("youtube.com", "youtu.be")
VIDEO_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")


def is_youtube_url(url: str) -> bool:
    return any(host in url for host in YOUTUBE_HOSTS)


def extract_video_id(url: str) -> Optional[str]:
    """Return the 11 character video id of a YouTube URL, or None."""
    if not is_youtube_url(url):
        return None
    match = VIDEO_ID_PATTERN.match(url)
    if match and len(match.group(2)) == 11:
        return match.group(2)
    return None
