"""Button remote for a home automation system driven over MQTT: controllers, debounced inputs, paging and display blanking."""

__version__ = "0.1.0"