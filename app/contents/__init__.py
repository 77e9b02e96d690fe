"""
Content store app.

Media blobs (images and video) stored beside a metadata catalog, with
type sniffing, quota accounting, WEBP previews and a filter/sort query
builder.
"""
