"""Export a binary cancer classifier to TorchScript for deployment."""
from __future__ import annotations

import argparse
from pathlib import Path

import torch
from torchvision import models


class ChannelsLastClassifier(torch.nn.Module):
    """Accept ``[N, 224, 224, 3]`` pixels in 0..255 and return a sigmoid score."""

    def __init__(self, checkpoint: Path | None = None) -> None:
        super().__init__()
        self.backbone = models.resnet18(weights=None)
        self.backbone.fc = torch.nn.Linear(self.backbone.fc.in_features, 1)
        if checkpoint and checkpoint.exists():
            state = torch.load(checkpoint, map_location="cpu")
            self.backbone.load_state_dict(state.get("state_dict", state), strict=False)
        self.register_buffer("mean", torch.tensor([0.485, 0.456, 0.406]).view(1, 3, 1, 1))
        self.register_buffer("std", torch.tensor([0.229, 0.224, 0.225]).view(1, 3, 1, 1))

    def forward(self, tensor: torch.Tensor) -> torch.Tensor:
        images = tensor.permute(0, 3, 1, 2) / 255.0
        images = (images - self.mean) / self.std
        return torch.sigmoid(self.backbone(images))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Trace the OncoScan classifier to TorchScript")
    parser.add_argument("--checkpoint", type=Path, default=None, help="Optional fine-tuned state dict")
    parser.add_argument("--output", type=Path, default=Path("models/oncoscan.pt"), help="Where to write the traced model")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    model = ChannelsLastClassifier(checkpoint=args.checkpoint)
    model.eval()
    dummy_input = torch.zeros(1, 224, 224, 3)
    traced = torch.jit.trace(model, dummy_input)
    args.output.parent.mkdir(parents=True, exist_ok=True)
    traced.save(str(args.output))
    print(f"Wrote {args.output}")


if __name__ == "__main__":
    main()
