"""HTTP server for stream listings and live chat."""
