"""Routing — frame id → template reference lookup.

A RoutingTable is built once per generation from every scanned document
and then shared read-only between request handlers.  FrameRouter swaps
whole tables in place when templates change.
"""
