"""SkyFlix recommendation service"""
