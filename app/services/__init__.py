"""
Roster admin services.

Core Services:
- entity_store: CRUD per entity table with the data-access error boundary
- association_service: wrestler junction relations, replacement and counts
- roster_service: screen-level operations combining stores and associations
- image_service & storage_client: image encoding, upload and public URLs
- capabilities: schema capability descriptor and session flags
- query_filters: in-memory search, filter and sort
"""
