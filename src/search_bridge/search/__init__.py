"""
Query translation for the mangled-field index.

This package is pure (no I/O):
- fields: physical field names and request defaults
- query_transformer: user query -> index-native query
- filter_query: partition/kind scoping clauses
- document_flattener: store document -> ``content`` tokens
- update_xml: update-handler request bodies
"""
