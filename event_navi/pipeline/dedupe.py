def dedupe_events_by_source_url(events):
    """
    Keep the first event seen for each source_url, in first-seen order.
    Events without a source_url are dropped.
    """
    events_by_url = {}
    for event in events or []:
        url = (event or {}).get("source_url")
        if not url:
            continue
        if url not in events_by_url:
            events_by_url[url] = event
    return list(events_by_url.values())
