from event_navi.venues import asty_tokushima, kochi_dibasan, kochi_skbh


def get_venues():
    """Build the venue registry, keyed by venue_id (also the output file name)."""
    venues = [
        asty_tokushima.VENUE,
        kochi_dibasan.VENUE,
        kochi_skbh.VENUE,
    ]
    return {venue.venue_id: venue for venue in venues}
