"""
Library browsing helpers.

Display formatting for the raw Jellyfin records returned by JellyfinClient.
The records themselves are passed through untouched.
"""


def get_item_title(item):
    """Get formatted display title for a search hint, season or episode."""
    name = item.get('Name') or item.get('Id') or 'Unknown'
    item_type = item.get('Type')

    if item_type == 'Episode':
        show = item.get('SeriesName') or 'Unknown Show'
        season_num = item.get('ParentIndexNumber')
        ep_num = item.get('IndexNumber')
        season_num = season_num if season_num is not None else 0
        ep_num = ep_num if ep_num is not None else 0
        return f"{show} S{season_num:02d}E{ep_num:02d} - {name}"
    elif item_type == 'Series':
        year = item.get('ProductionYear')
        return f"{name} ({year})" if year else name
    else:
        return name


def summarize_item(item):
    """Small JSON-friendly view of a record: id, type and display title."""
    return {
        'id': item.get('Id') or item.get('ItemId'),
        'type': item.get('Type'),
        'title': get_item_title(item),
    }


def summarize_stream(stream, default_index=None):
    """JSON-friendly view of one MediaStreams entry."""
    index = stream.get('Index')
    return {
        'label': stream.get('DisplayTitle'),
        'index': index,
        'language': stream.get('Language') or 'Unknown',
        'codec': stream.get('Codec') or 'Unknown',
        'forced': bool(stream.get('IsForced')),
        'default': default_index is not None and index == default_index,
    }
