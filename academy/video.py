import re

YOUTUBE_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")
VIDEO_ID_LENGTH = 11

EMBED_URL = "https://www.youtube.com/embed/{video_id}"


def extract_video_id(url):
    """Get the 11 character YouTube video id from a link, or None"""
    if not url:
        return None
    match = YOUTUBE_ID_PATTERN.match(url.strip())
    if match and len(match.group(2)) == VIDEO_ID_LENGTH:
        return match.group(2)
    return None


def embed_url(url):
    """Player URL for a chapter link, or None when the link has no video id"""
    video_id = extract_video_id(url)
    if video_id is None:
        return None
    return EMBED_URL.format(video_id=video_id)
