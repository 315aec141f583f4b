"""
Default subtitle/audio track service.

Jellyfin has no endpoint for "default track of this episode"; it remembers
the tracks of the last playback session instead. Defaults are therefore
changed by reporting a playback progress and a playback stop at the
episode's current position with the wanted stream indexes.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from error_handling import EpisodeDataError
from core.library_service import get_item_title, summarize_stream
from utils.constants import STREAM_TYPE_SUBTITLE, STREAM_TYPE_AUDIO


@dataclass(frozen=True)
class StreamDescriptor:
    """A subtitle or audio track, identified by display label and stream index."""
    label: Optional[str]
    index: Optional[int]

    def matches(self, stream: Dict[str, Any]) -> bool:
        return stream.get('DisplayTitle') == self.label and stream.get('Index') == self.index

    @classmethod
    def from_dict(cls, data):
        """Build from {'label': ..., 'index': ...}; None stays None."""
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError(f"Stream must be an object with label and index, got {data!r}")
        index = data.get('index')
        if isinstance(index, bool) or not isinstance(index, int):
            raise ValueError(f"Stream index must be an integer, got {index!r}")
        return cls(label=data.get('label'), index=index)


@dataclass(frozen=True)
class TrackUpdateResult:
    episode_id: str
    title: str
    subtitle_changed: bool
    audio_changed: bool

    @property
    def changed(self) -> bool:
        return self.subtitle_changed or self.audio_changed


def list_streams(episode) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Split an episode's streams into subtitle and audio tracks, order kept.

    Returns:
        tuple: (subtitle_streams, audio_streams)
    """
    streams = episode.get('MediaStreams') or []
    subtitles = [s for s in streams if s.get('Type') == STREAM_TYPE_SUBTITLE]
    audio = [s for s in streams if s.get('Type') == STREAM_TYPE_AUDIO]
    return subtitles, audio


def stream_choices(episode):
    """Subtitle and audio tracks of an episode, flagged with the current defaults."""
    subtitles, audio = list_streams(episode)
    source = (episode.get('MediaSources') or [{}])[0]
    return {
        'subtitles': [summarize_stream(s, source.get('DefaultSubtitleStreamIndex')) for s in subtitles],
        'audio': [summarize_stream(s, source.get('DefaultAudioStreamIndex')) for s in audio],
    }


def build_payload(episode_id, episode):
    """
    Seed a playback report from the episode's current defaults and position.

    Raises:
        EpisodeDataError: if MediaSources or UserData is missing
    """
    media_sources = episode.get('MediaSources')
    if not media_sources:
        raise EpisodeDataError(episode_id, 'MediaSources')
    user_data = episode.get('UserData')
    if user_data is None:
        raise EpisodeDataError(episode_id, 'UserData')

    source = media_sources[0]
    return {
        'MediaSourceId': episode_id,
        'ItemId': episode_id,
        'SubtitleStreamIndex': source.get('DefaultSubtitleStreamIndex'),
        'AudioStreamIndex': source.get('DefaultAudioStreamIndex'),
        'PositionTicks': user_data.get('PlaybackPositionTicks') or 0,
    }


def update_defaults(client, episode_id, subtitle: Optional[StreamDescriptor],
                    audio: Optional[StreamDescriptor]) -> Tuple[bool, bool]:
    """
    Make subtitle and audio the default tracks of one episode.

    A descriptor only counts when a stream with the same label and index
    exists on the episode. Each stream is tested against the subtitle first;
    only a stream that is not the subtitle can match the audio. Pass None to
    leave an axis alone.

    When anything matched, the payload is reported as playback progress and
    then as playback stopped. The two writes are not atomic: if the second
    fails, the first has already landed.

    Args:
        client: Authenticated JellyfinClient
        episode_id: Jellyfin item id of the episode
        subtitle: Desired subtitle track, or None
        audio: Desired audio track, or None

    Returns:
        tuple: (subtitle_changed, audio_changed)

    Raises:
        EpisodeDataError: if the episode lacks MediaSources, UserData or MediaStreams
    """
    episode = client.get_episode(episode_id)
    payload = build_payload(episode_id, episode)

    streams = episode.get('MediaStreams')
    if streams is None:
        raise EpisodeDataError(episode_id, 'MediaStreams')

    subtitle_changed = False
    audio_changed = False

    for stream in streams:
        if subtitle is not None and subtitle.matches(stream):
            payload['SubtitleStreamIndex'] = subtitle.index
            subtitle_changed = True
        elif audio is not None and audio.matches(stream):
            payload['AudioStreamIndex'] = audio.index
            audio_changed = True

    if subtitle_changed or audio_changed:
        logging.debug(
            f"Reporting defaults for {episode_id}: subtitle={payload['SubtitleStreamIndex']} "
            f"audio={payload['AudioStreamIndex']} position={payload['PositionTicks']}"
        )
        client.report_playback_progress(payload)
        client.report_playback_stopped(payload)

    return subtitle_changed, audio_changed


def update_season_defaults(client, show_id, season_id, subtitle, audio) -> List[TrackUpdateResult]:
    """
    Apply the same desired tracks to every episode of a season, in order.

    Stops at the first failure; episodes before it keep their new defaults.

    Returns:
        list of TrackUpdateResult, one per episode
    """
    episodes = client.list_episodes(show_id, season_id)
    logging.info(f"Updating default tracks for {len(episodes)} episode(s)")

    results = []
    for episode in episodes:
        episode_id = episode.get('Id')
        title = get_item_title(episode)
        subtitle_changed, audio_changed = update_defaults(client, episode_id, subtitle, audio)
        result = TrackUpdateResult(episode_id, title, subtitle_changed, audio_changed)

        if result.changed:
            logging.info(f"Updated defaults for {title} (subtitle={subtitle_changed}, audio={audio_changed})")
        else:
            logging.info(f"No matching tracks for {title}")
        results.append(result)

    changed = sum(1 for r in results if r.changed)
    logging.info(f"Default track update complete: {changed}/{len(results)} episode(s) changed")
    return results
