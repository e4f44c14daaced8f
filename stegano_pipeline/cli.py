from __future__ import annotations

import json
import logging
from typing import IO, List, Optional

import click

from . import hill, pipeline
from .errors import SteganoPipelineError
from .image_utils import generate_cover, load_pixels, save_pixels


def _parse_matrix(ctx, param, value: Optional[str]) -> Optional[List[List[int]]]:
    if value is None:
        return None
    try:
        nums = [int(v) for v in value.replace(" ", "").split(",")]
    except ValueError:
        raise click.BadParameter("expected four comma-separated integers, e.g. 3,2,5,7")
    if len(nums) != 4:
        raise click.BadParameter("expected four comma-separated integers, e.g. 3,2,5,7")
    return [nums[:2], nums[2:]]


def _matrix_option(matrix) -> str:
    return ",".join(str(v) for row in matrix for v in row)


@click.group()
@click.option("--verbose", is_flag=True, help="Log every pipeline stage")
def cli(verbose: bool):
    """Stegano-Pipeline CLI: Hill cipher + S-DES + LSB image steganography."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--in", "in_path", required=True, help="Input cover image")
@click.option("--out", "out_path", required=True, help="Output stego image (PNG)")
@click.option("--message", required=True, help="Secret text; only its letters are kept")
@click.option("--key-matrix", envvar="STEGANO_KEY_MATRIX", default=_matrix_option(pipeline.DEFAULT_KEY_MATRIX),
              show_default=True, callback=_parse_matrix, help="Hill key matrix as a,b,c,d (row-major)")
@click.option("--key", envvar="STEGANO_SDES_KEY", default=pipeline.DEFAULT_SDES_KEY, show_default=True,
              help="10-bit S-DES key")
@click.option("--report", "report_path", default=None, help="Write the encryption report as JSON")
def hide(in_path: str, out_path: str, message: str, key_matrix: List[List[int]], key: str, report_path: Optional[str]):
    """Encrypt a message and hide it inside an image."""
    try:
        carrier = load_pixels(in_path)
        artifact = pipeline.encrypt(message, key_matrix, key, carrier)
        save_pixels(out_path, artifact.stego_image)
    except SteganoPipelineError as e:
        raise click.ClickException(e.message)
    except ValueError as e:
        raise click.ClickException(str(e))

    summary = artifact.summary()
    if report_path:
        with open(report_path, "w", encoding="utf-8") as f:
            json.dump(summary, f, indent=2)
    click.echo(f"Cipher text: {summary['cipher_text']}")
    click.echo(f"Bits used: {summary['used_bits']}/{summary['capacity_bits']}")
    psnr = summary["psnr"]
    click.echo("PSNR: inf" if psnr is None else f"PSNR: {psnr:.2f} dB")
    click.echo(f"Stego image saved to: {out_path}")


@cli.command()
@click.option("--in", "in_path", required=True, help="Input stego image (PNG)")
@click.option("--report", "report_file", type=click.File("r", encoding="utf-8"), default=None,
              help="JSON report written by `hide`")
@click.option("--key-matrix", envvar="STEGANO_KEY_MATRIX", default=None, callback=_parse_matrix,
              help="Hill key matrix as a,b,c,d  [default: report value or 3,2,5,7]")
@click.option("--key", envvar="STEGANO_SDES_KEY", default=None,
              help="10-bit S-DES key  [default: report value or 1010000010]")
@click.option("--length", type=int, default=None, help="Original letter count; trailing padding is kept if omitted")
def extract(in_path: str, report_file: Optional[IO[str]], key_matrix: Optional[List[List[int]]], key: Optional[str],
            length: Optional[int]):
    """Extract and decrypt a hidden message from an image."""
    report = {}
    if report_file is not None:
        try:
            report = json.load(report_file)
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Report is not valid JSON: {e}")
        if not isinstance(report, dict):
            raise click.ClickException("Report must be a JSON object")

    matrix = key_matrix or report.get("key_matrix") or pipeline.DEFAULT_KEY_MATRIX
    key = key or report.get("key") or pipeline.DEFAULT_SDES_KEY
    if length is None:
        length = report.get("original_length")

    try:
        artifact = pipeline.StegoArtifact(
            stego_image=load_pixels(in_path),
            key_matrix=hill.as_key_matrix(matrix),
            key10=key,
            original_length=length,
        )
        plain_text = pipeline.decrypt(artifact)
    except SteganoPipelineError as e:
        raise click.ClickException(e.message)
    except ValueError as e:
        raise click.ClickException(f"Decryption failed: {e}")
    click.echo(plain_text)


@cli.command()
@click.option("--out", "out_path", required=True, help="Output cover image (PNG)")
@click.option("--width", type=int, default=256, show_default=True)
@click.option("--height", type=int, default=256, show_default=True)
@click.option("--seed", type=int, default=42, show_default=True)
def cover(out_path: str, width: int, height: int, seed: int):
    """Write a generated cover image."""
    try:
        save_pixels(out_path, generate_cover(width, height, seed))
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(f"Wrote {out_path}")


if __name__ == "__main__":
    cli()
