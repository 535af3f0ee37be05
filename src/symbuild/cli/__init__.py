"""
Command Line Interface Package.

Exposes the ``symbuild`` console script: rendering, checking and symbol listing
for definition documents.
"""
