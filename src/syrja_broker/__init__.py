"""Syrja broker: presence, signaling relay and id directory for peer-to-peer clients."""
