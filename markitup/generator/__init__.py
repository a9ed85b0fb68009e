"""Markdown generators for CSV, DOCX, HTML, images, PPTX and WAV transcriptions."""