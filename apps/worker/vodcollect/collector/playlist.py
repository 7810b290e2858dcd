"""
Parsing of the `vod_play_from` / `vod_play_url` wire convention
"""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


class Episode(BaseModel):
    name: str = ""
    url: str = ""


class PlaySource(BaseModel):
    """Episodes offered by one upstream play source"""
    source_name: str
    urls: List[Episode] = Field(default_factory=list)


def _split_episode(segment: str, bare_is_url: bool = False) -> Tuple[str, str]:
    if "$" in segment:
        name, url = segment.split("$", 1)
        return name, url
    if bare_is_url:
        return "", segment
    return segment, ""


def parse_play_urls(source_names: Optional[str], play_url: Optional[str]) -> List[PlaySource]:
    """
    Build per-source episode lists

    `source_names` is comma separated. A `#` in `play_url` means a multi-episode
    list of `name$url` segments; otherwise the whole value is one episode. Every
    source name receives the same episode list, and sources ending up with no
    episodes are left out.
    """
    if not play_url:
        return []

    if "#" in play_url:
        episodes = [
            Episode(name=name, url=url)
            for name, url in (_split_episode(seg) for seg in play_url.split("#") if seg.strip())
        ]
    else:
        name, url = _split_episode(play_url, bare_is_url=True)
        episodes = [Episode(name=name, url=url)]

    if not episodes:
        return []

    return [
        PlaySource(source_name=source_name.strip(), urls=[ep.model_copy() for ep in episodes])
        for source_name in (source_names or "").split(",")
    ]
