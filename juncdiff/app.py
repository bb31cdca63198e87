# app.py - global settings of the application.

APP = "juncdiff"
VERSION = "0.1.0"
