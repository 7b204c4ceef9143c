"""File Relay: public upload relay backed by a remote object store and a local cache."""
