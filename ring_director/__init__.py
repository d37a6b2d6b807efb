"""Ring Director: a wrestling-promotion storyline engine.

The Promotion in ``ring_director.engine`` is the entry point; it owns the
storyline director, championship ledger, match simulator and PPV booker.
"""
