"""
打包器抽象接口和实现

把暂存目录写成 zip / tar / tar.gz / tgz / zpk 包文件。
zpk 就是 zip，只是遍历的根目录是 data/ 的上一级。
"""

import gzip
import os
import shutil
import tarfile
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, List, Optional, Protocol, Tuple, Union

from ..config.schema import ArchiveFormat
from ..utils.logging import debug, LogStage
from .build_context import ArchiveIOError, UnknownFormatError


class ProgressCallback(Protocol):
    """进度回调协议"""

    def __call__(self, current: int, total: int, current_file: Optional[str] = None) -> None:
        ...


class ArchiveWriter(ABC):
    """包写入器抽象基类"""

    def __init__(self, output_path: Path):
        self.output_path = Path(output_path)
        self._created: List[Path] = []

    @abstractmethod
    def add_file(self, relative_path: str, source_path: Path) -> None:
        """添加文件，relative_path 使用正斜杠"""
        pass

    @abstractmethod
    def finalize(self) -> Path:
        """完成写入，返回最终生成的文件路径"""
        pass

    def _claim(self, path: Path) -> Path:
        """登记即将由本写入器创建的文件；文件已存在时拒绝覆盖"""
        if path.exists():
            raise FileExistsError(f"文件已存在，拒绝覆盖: {path}")
        self._created.append(path)
        return path

    def abort(self) -> None:
        """出错时清理本写入器写出的部分文件，不碰已有文件"""
        for path in self.partial_outputs():
            try:
                path.unlink()
            except FileNotFoundError:
                pass

    def partial_outputs(self) -> List[Path]:
        return list(self._created)


class ZipArchiveWriter(ArchiveWriter):
    """Zip 写入器（zip 与 zpk）"""

    def __init__(self, output_path: Path, level: int = 6):
        super().__init__(output_path)
        self.level = min(9, max(1, level))
        self._zip: Optional[zipfile.ZipFile] = None

    def _open(self) -> zipfile.ZipFile:
        if self._zip is None:
            self._zip = zipfile.ZipFile(
                self._claim(self.output_path), 'w', zipfile.ZIP_DEFLATED, compresslevel=self.level
            )
        return self._zip

    def add_file(self, relative_path: str, source_path: Path) -> None:
        self._open().write(source_path, relative_path)

    def finalize(self) -> Path:
        # 空目录也生成一个合法的空包
        self._open().close()
        self._zip = None
        return self.output_path

    def abort(self) -> None:
        if self._zip is not None:
            try:
                self._zip.close()
            except (OSError, ValueError):
                pass
            self._zip = None
        super().abort()


class TarArchiveWriter(ArchiveWriter):
    """Tar 写入器"""

    def __init__(self, output_path: Path):
        super().__init__(output_path)
        self._tar: Optional[tarfile.TarFile] = None

    @property
    def tar_path(self) -> Path:
        return self.output_path

    def _open(self) -> tarfile.TarFile:
        if self._tar is None:
            self._tar = tarfile.open(self._claim(self.tar_path), 'w', format=tarfile.PAX_FORMAT)
        return self._tar

    def add_file(self, relative_path: str, source_path: Path) -> None:
        self._open().add(str(source_path), arcname=relative_path, recursive=False)

    def _close_tar(self) -> None:
        self._open().close()
        self._tar = None

    def finalize(self) -> Path:
        self._close_tar()
        return self.output_path

    def abort(self) -> None:
        if self._tar is not None:
            try:
                self._tar.close()
            except (OSError, ValueError):
                pass
            self._tar = None
        super().abort()


class GzipTarArchiveWriter(TarArchiveWriter):
    """tar.gz / tgz 写入器

    先写 <stem>.tar，再压缩成 <stem>.tar.gz（压缩总是追加 .gz），删除中间的 .tar；
    如果请求的是 .tgz，最后改名为 <stem>.tgz。
    """

    def __init__(self, output_path: Path, fmt: ArchiveFormat = ArchiveFormat.TAR_GZ):
        if fmt not in (ArchiveFormat.TAR_GZ, ArchiveFormat.TGZ):
            raise UnknownFormatError(f"GzipTarArchiveWriter 不支持格式: {fmt.value}")
        super().__init__(output_path)
        self.format = fmt
        self.stem = self.output_path.name[:-len(fmt.suffix)]

    @property
    def tar_path(self) -> Path:
        return self.output_path.with_name(self.stem + ArchiveFormat.TAR.suffix)

    @property
    def gzip_path(self) -> Path:
        return self.tar_path.with_name(self.tar_path.name + ".gz")

    def _open(self) -> tarfile.TarFile:
        if self._tar is None:
            # 写 tar 之前确认后续步骤要用的文件都不存在
            for path in (self.gzip_path, self.output_path):
                if path.exists():
                    raise FileExistsError(f"文件已存在，拒绝覆盖: {path}")
        return super()._open()

    def finalize(self) -> Path:
        self._close_tar()

        with open(self.tar_path, 'rb') as src, gzip.open(self._claim(self.gzip_path), 'wb') as dst:
            shutil.copyfileobj(src, dst, 64 * 1024)
        self.tar_path.unlink()

        if self.gzip_path != self.output_path:
            os.replace(self.gzip_path, self._claim(self.output_path))
        return self.output_path


class ArchiveWriterFactory:
    """包写入器工厂"""

    @staticmethod
    def create_writer(fmt: Union[ArchiveFormat, str], output_path: Path) -> ArchiveWriter:
        """创建写入器

        Raises:
            UnknownFormatError: 不支持的格式
        """
        try:
            fmt = ArchiveFormat(fmt)
        except ValueError:
            raise UnknownFormatError(f"未知的打包格式 \"{fmt}\"")

        if fmt in (ArchiveFormat.ZIP, ArchiveFormat.ZPK):
            return ZipArchiveWriter(output_path)
        if fmt == ArchiveFormat.TAR:
            return TarArchiveWriter(output_path)
        return GzipTarArchiveWriter(output_path, fmt)

    @staticmethod
    def get_available_formats() -> List[ArchiveFormat]:
        return list(ArchiveFormat)


def iter_files(root: Path) -> Iterator[Tuple[str, Path]]:
    """按确定的顺序遍历 root 下的所有文件

    Yields:
        (相对路径, 绝对路径)，相对路径使用正斜杠
    """
    root = Path(root)
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            yield path.relative_to(root).as_posix(), path


class Archiver:
    """打包器"""

    def __init__(self):
        self.file_count = 0
        self.total_bytes = 0

    def archive(
        self,
        staging_root: Path,
        output_path: Path,
        fmt: Union[ArchiveFormat, str],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> Tuple[int, int]:
        """把 staging_root 下的文件写入包文件

        Args:
            staging_root: 遍历的根目录（zpk 时为工作区根目录）
            output_path: 包文件路径
            fmt: 打包格式
            progress_callback: 进度回调

        Returns:
            (文件数, 原始总字节数)

        Raises:
            UnknownFormatError: 不支持的格式
            ArchiveIOError: 读写失败
        """
        writer = ArchiveWriterFactory.create_writer(fmt, Path(output_path))

        self.file_count = 0
        self.total_bytes = 0
        try:
            files = list(iter_files(staging_root))
            total = sum(path.stat().st_size for _, path in files)

            for relative_path, path in files:
                if progress_callback:
                    progress_callback(self.total_bytes, total, relative_path)
                writer.add_file(relative_path, path)
                self.file_count += 1
                self.total_bytes += path.stat().st_size

            final_path = writer.finalize()
        except (OSError, tarfile.TarError, zipfile.LargeZipFile) as e:
            writer.abort()
            raise ArchiveIOError(f"写入包文件失败 {output_path}: {e}") from e

        debug(f"写入 {self.file_count} 个文件到 {final_path}", stage=LogStage.ARCHIVE)
        return self.file_count, self.total_bytes
