# This project was developed with assistance from AI tools.
"""Signal1 broker/lender portal: Supabase client core and admin proxy."""

__version__ = "0.1.0"
