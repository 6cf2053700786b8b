"""Form-generation prompt templates, one module per pipeline stage."""
