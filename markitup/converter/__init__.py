"""Intermediate converters: XLSX workbooks to CSV and PCM WAV audio to 16-bit mono WAV."""