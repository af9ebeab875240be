"""Switchboard oracle client for Aptos."""
