"""Mock capture backends and device errors."""
