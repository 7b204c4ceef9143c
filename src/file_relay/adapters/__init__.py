"""
Adapter layer for the File Relay.

Contains the in-process file cache and the remote object-store clients
(Supabase Storage, S3, or none) selected by configuration.
"""
