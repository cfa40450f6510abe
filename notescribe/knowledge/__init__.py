"""
Read-only clinical knowledge lookups consumed during field enrichment.
"""
