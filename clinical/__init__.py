"""Clinical rules: DCSPH code knowledge base, red flags and HHSB mapping."""
