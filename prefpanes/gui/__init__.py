"""customtkinter front end for the preferences window."""
