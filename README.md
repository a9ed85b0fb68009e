# markitup

markitup turns files into Markdown. `markitup.core.convert` looks at the
leading bytes of a file to work out what it is; for ZIP archives (Office
documents) it falls back to the file extension. It then hands the bytes to
the matching generator.

## What `convert` handles

| Input | How it is recognised | What you get |
|---|---|---|
| `.docx` | ZIP content + extension | Headings, paragraphs, tables and images (through `pandoc` when it can be started) |
| `.pptx` | ZIP content + extension | `# PowerPoint Presentation`, then `## Slide N` per slide with titles, bullets, tables and images |
| `.xlsx` | ZIP content + extension | One Markdown table per worksheet under `## Sheet: <name>`, separated by `---` |
| JPEG, PNG, GIF | content | An image reference: a base64 data URI, or a file saved into the image directory |
| HTML | content starting with `<!doctype html` or `<html` | Markdown rendering of the page |

Anything else raises `markitup.common.ConversionError`, either
`Could not determine file type` or `Unsupported file type: <mime>`.

## Command line

```
markitup report.docx
```

prints the Markdown to standard output. Options:

- `-o PATH`, `--output PATH` — write the Markdown to `PATH` and print `Output written to: PATH`
- `-i PATH`, `--image-path PATH` — save images into this directory and link to them
  (with no image directory, images are embedded as base64 data URIs)
- `-a`, `--ai-enable` — name images with a vision model instead of `pic-<timestamp>`
- `--no-ai` — turn model naming off (cannot be combined with `-a`)
- `--version` — print the version

On a conversion or write error the message goes to standard error and the
exit status is 1.

```
markitup slides.pptx -o notes/slides.md -i notes/images
```

When both an output path and an image directory are given, and the image
directory lies under the output file's directory, image links are written
relative to the output file.

## Configuration

`markitup.config.load_settings(config_file)` builds a `Settings` from
built-in defaults, then a TOML file (by default `Config.toml` beside the
running script), then environment variables named `APP__<SETTING>`:

- `model_path` — speech model directory, shown in transcriptions (default `vosk/models/vosk-model-en-us`)
- `image_path` — where images are saved; empty means embed as base64
- `output_path` — where the command writes its result; unset means standard output
- `is_ai_enpower` — name images with the vision model (`true`/`false`, `1`/`0`, `yes`/`no`, `on`/`off`)
- `doubao_api_key` — key for that model; without it images are named by timestamp

`get_settings()` returns a copy of the global settings, loaded on first use;
`update_settings_with_cli_args(image_path, output_path, ai_enable)` overrides
the values that are given. If the model request fails, the timestamp name is
used.

## Python use

```python
from markitup.core import ConverterFile, convert, convert_from_path

markdown = convert_from_path("report.docx")

with open("page.html", "rb") as fh:
    markdown = convert(ConverterFile(file_stream=fh.read(), file_path="page.html"))
```

The generators can also be called directly on bytes, for example
`markitup.generator.csv2md.run`, `markitup.generator.html2md.run` (or
`html_to_markdown` on a string), `markitup.generator.image2md.run_with_mode`
with an `ImageProcessingMode`, and `markitup.converter.xlsx2csv.xlsx_to_csv`,
which returns an `Xlsx2CsvResult` with `sheet_names`, `csv_data`,
`get_by_name()` and `first()`.

## What it does not do

- **CSV and other plain text.** `convert` does not recognise plain text by
  content, so a `.csv` file raises `Could not determine file type`, as does
  HTML that does not start with a doctype or `<html>` tag. Call
  `markitup.generator.csv2md.run(data)` directly for CSV.
- **Speech recognition.** No recognizer is included. A WAV file passed to
  `convert` fails with `Failed to load model`. To transcribe, call
  `markitup.generator.wav2md.run(data, recognizer)` with a callable that takes
  the 16-bit mono samples and the sample rate and returns the text (or `None`).
- **Compressed audio.** `markitup.converter.audio2wav.audio_to_wav` decodes PCM
  WAV only. MP3 and Ogg files are detected but fail to decode; FLAC and M4A
  are reported as unsupported.
- **Matching images to their places.** In DOCX (without pandoc) and PPTX files
  a picture is rendered from the first matching image in the archive, not
  necessarily the one the picture refers to.
- There is no graphical interface.