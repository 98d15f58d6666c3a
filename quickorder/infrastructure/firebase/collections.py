"""Firestore collection and field names (schema-in-code).

Firestore has no DDL or migrations. Collections are created automatically
when you first write a document. Use these constants so collection names
stay consistent and act as the single source of truth for the "schema".
Field names are camelCase so existing storefront data stays readable.
"""

COLLECTION_STORES = "stores"
COLLECTION_PRODUCTS = "products"
COLLECTION_ORDERS = "orders"
# One document per lowercased store id; reserves the slug ignoring case
COLLECTION_STORE_SLUGS = "storeSlugs"

# Tenant key shared by products and orders
FIELD_STORE_ID = "storeId"
FIELD_OWNER_EMAIL = "ownerEmail"
FIELD_OWNER_PHONE = "ownerPhone"
FIELD_CREATED_AT = "createdAt"
