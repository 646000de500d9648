"""CLI entry point for omniscan."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from dotenv import load_dotenv

from .categories import CATALOGUE, ScanCategory
from .config import load_config
from .orchestrator import ScanFailed, ScanOrchestrator
from .provider import create_provider
from .session import ScanRecord, format_details


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="omniscan",
        description="Envie uma foto e receba um resumo estruturado gerado por IA",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Caminho do arquivo de configuração (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Exibir logs detalhados"
    )

    sub = parser.add_subparsers(dest="command")

    # categories
    sub.add_parser("categories", help="Listar as categorias de scan")

    # cameras
    sub.add_parser("cameras", help="Listar as câmeras disponíveis")

    # scan
    scan_parser = sub.add_parser("scan", help="Analisar uma ou mais imagens")
    scan_parser.add_argument(
        "--category",
        "-t",
        required=True,
        choices=[c.value.lower() for c in ScanCategory],
        help="Categoria do scan",
    )
    scan_parser.add_argument("images", nargs="*", help="Arquivos de imagem")
    scan_parser.add_argument(
        "--camera", type=int, default=None, metavar="INDEX",
        help="Capturar da câmera indicada",
    )
    scan_parser.add_argument("--json", action="store_true", help="Saída em JSON")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    if args.command == "scan" and bool(args.images) == (args.camera is not None):
        scan_parser.error("informe arquivos de imagem ou --camera (apenas um)")

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()
    config = load_config(args.config)

    match args.command:
        case "categories":
            _cmd_categories()
        case "cameras":
            _cmd_cameras(config)
        case "scan":
            ok = asyncio.run(_cmd_scan(config, args))
            if not ok:
                sys.exit(1)


def _cmd_categories() -> None:
    for category, info in CATALOGUE.items():
        print(f"{category.value.lower():<10} {info.product:<12} {info.description}")


def _cmd_cameras(config) -> None:
    from .camera import ScanCamera

    cameras = ScanCamera.list_cameras(config.camera.max_index)
    if not cameras:
        print("Nenhuma câmera disponível foi encontrada.")
        return
    print(f"Câmeras disponíveis: {len(cameras)}")
    for idx in cameras:
        print(f"  câmera {idx}")


def _collect_images(config, args) -> list[tuple[str, str]]:
    """Return (label, data URI) pairs for the requested sources."""
    from .images import load_image

    if args.camera is not None:
        from .camera import ScanCamera

        camera = ScanCamera(
            jpeg_quality=config.camera.jpeg_quality,
            max_side=config.camera.max_side,
        )
        print("📷 Capturando...", file=sys.stderr)
        frame = camera.capture(args.camera)
        return [(f"câmera {frame.camera_index}", frame.image)]

    return [(path, load_image(path)) for path in args.images]


async def _cmd_scan(config, args) -> bool:
    category = ScanCategory.parse(args.category)
    try:
        images = _collect_images(config, args)
    except (OSError, ValueError, RuntimeError, ImportError) as e:
        print(f"Erro ao carregar imagem: {e}", file=sys.stderr)
        return False

    orchestrator = ScanOrchestrator(create_provider(config))
    ok = True
    for label, image in images:
        print(f"🔍 Analisando {label}...", file=sys.stderr)
        try:
            await orchestrator.submit(image, category)
        except ScanFailed as e:
            print(f"{label}: {e}", file=sys.stderr)
            ok = False

    # Most recent first, as kept by the session.
    records = orchestrator.history
    if args.json:
        print(json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2))
    else:
        for record in records:
            print()
            print(_render(record))
    return ok


def _render(record: ScanRecord) -> str:
    info = CATALOGUE[record.category]
    lines = [
        f"✓ {info.product}: {record.summary}",
        f"  {record.timestamp:%Y-%m-%d %H:%M} UTC  [{record.id}]",
    ]
    lines.extend(format_details(record.details))
    return "\n".join(lines)
