"""C++ declarations/definitions generation for one style module.

Generation is collect-then-emit: the constructor walks the module once to
build the shared px / font family / icon mask tables, and every literal is
emitted afterwards from those tables. Rendering happens entirely in memory;
generate_module() writes the artifacts only once every one of them rendered.
"""

from collections.abc import Callable
from pathlib import Path

from stylegen.core.atlas import ModifierResolver, icon_mask_data
from stylegen.core.collector import collect_unique_values, px_adjustments
from stylegen.core.emitter import LiteralEmitter, px_value_name
from stylegen.core.encoding import string_to_binary_array, string_to_encoded_string
from stylegen.core.palette import PaletteLayout
from stylegen.core.scale import SCALES, Scale
from stylegen.core.types import OWNING_TAGS, GenerationReport, Module, TypeTag
from stylegen.core.writer import ProjectInfo, SourceFile, write_artifacts


def _no_modifiers(name: str) -> None:
    return None


def initialization_order(module: Module) -> list[Module]:
    """Module and every include, dependencies first, each listed once."""
    order: list[Module] = []
    seen: set[int] = set()

    def visit(current: Module) -> None:
        if id(current) in seen:
            return
        seen.add(id(current))
        for include in current.includes:
            visit(include)
        order.append(current)

    visit(module)
    return order


class Generator:
    def __init__(
        self,
        module: Module,
        dest_base_path: str,
        project: ProjectInfo,
        is_palette: bool | None = None,
        resolve_modifier: ModifierResolver | None = None,
        icons_root: str | None = None,
        scales: tuple[Scale, ...] = SCALES,
    ):
        self.module = module
        self.base_path = dest_base_path
        self.base_name = Path(dest_base_path).name.split('.')[0]
        self.project = project
        self.is_palette = module.is_palette if is_palette is None else is_palette
        self.resolve_modifier: Callable = resolve_modifier or _no_modifiers
        self.icons_root = icons_root
        self.scales = scales

        self.tables = collect_unique_values(module)
        self.emitter = LiteralEmitter(module, self.tables)
        self.palette = PaletteLayout.from_module(module) if self.is_palette else None

    # -- header ---------------------------------------------------------------

    def write_header(self) -> str:
        header = SourceFile(self.base_path + '.h', self.project)
        header.include('ui/style/style_core.h').newline()
        self._write_header_style_namespace(header)
        self._write_refs_declarations(header)
        return header.render()

    def _write_header_style_namespace(self, header: SourceFile) -> None:
        if not self.module.has_structs() and not self.module.has_variables():
            return
        header.push_namespace('style')

        if self.module.has_variables():
            header.push_namespace('internal').newline()
            header.write(f'void init_{self.base_name}();\n\n')
            header.pop_namespace()

        wrote_forward_declarations = self._write_structs_forward_declarations(header)
        if self.module.has_structs():
            if not wrote_forward_declarations:
                header.newline()
            self._write_structs_definitions(header)
        elif self.is_palette:
            if not wrote_forward_declarations:
                header.newline()
            self._write_palette_definition(header)

        header.pop_namespace().newline()

    def _write_structs_forward_declarations(self, header: SourceFile) -> bool:
        external: list[str] = []
        for variable in self.module.variables:
            type_ = variable.value.type
            if type_.tag != TypeTag.STRUCT:
                continue
            if self.module.find_struct_in_module(type_.name, self.module) is None:
                if type_.name[-1] not in external:
                    external.append(type_.name[-1])
        if not external:
            return False

        header.newline()
        for name in external:
            header.write(f'struct {name};\n')
        header.newline()
        return True

    def _write_structs_definitions(self, header: SourceFile) -> None:
        for struct in self.module.structs:
            name = struct.name[-1]
            clones = []
            for f in struct.fields:
                clones.append(f'{f.name}.clone()' if f.type.tag in OWNING_TAGS else f.name)
            header.write(
                f'struct {name} {{\n'
                f'\t{name} clone() const {{\n'
                f'\t\treturn {{ {", ".join(clones)} }};\n'
                f'\t}}\n'
            )
            if clones:
                header.newline()
            for f in struct.fields:
                header.write(f'\t{self.emitter.type_to_target_type(f.type)} {f.name};\n')
            header.write('};\n\n')

    def _write_palette_definition(self, header: SourceFile) -> None:
        assert self.palette is not None
        count = self.palette.count
        header.write(
            'class palette {\n'
            'public:\n'
            '\tpalette() = default;\n'
            '\tpalette(const palette &other) = delete;\n'
            '\n'
            '\tQByteArray save() const;\n'
            '\tbool load(const QByteArray &cache);\n'
            '\tbool setColor(QLatin1String name, uchar r, uchar g, uchar b, uchar a);\n'
            '\tbool setColor(QLatin1String name, QLatin1String from);\n'
            '\n'
            '\t// Created not inited, should be finalized before usage.\n'
            '\tvoid finalize();\n'
            '\n'
        )
        for entry in self.palette.entries:
            header.write(
                f'\tinline const color &{entry.name}() const {{ return _colors[{entry.index}]; }};\n'
            )
        header.write(
            '\n'
            '\tpalette &operator=(const palette &other) {\n'
            '\t\tauto wasReady = _ready;\n'
            f'\t\tfor (int i = 0; i != {count}; ++i) {{\n'
            '\t\t\tif (other._status[i] == Status::Loaded) {\n'
            '\t\t\t\tsetData(i, *other.data(i));\n'
            '\t\t\t} else if (_status[i] != Status::Initial) {\n'
            '\t\t\t\tdata(i)->~ColorData();\n'
            '\t\t\t\t_status[i] = Status::Initial;\n'
            '\t\t\t\t_ready = false;\n'
            '\t\t\t}\n'
            '\t\t}\n'
            '\t\tif (wasReady && !_ready) {\n'
            '\t\t\tfinalize();\n'
            '\t\t}\n'
            '\t\treturn *this;\n'
            '\t}\n'
            '\n'
            '\tstatic int32 Checksum();\n'
            '\n'
            '\t~palette() {\n'
            f'\t\tfor (int i = 0; i != {count}; ++i) {{\n'
            '\t\t\tif (_status[i] != Status::Initial) {\n'
            '\t\t\t\tdata(i)->~ColorData();\n'
            '\t\t\t}\n'
            '\t\t}\n'
            '\t}\n'
            '\n'
            'private:\n'
            '\tstruct TempColorData { uchar r, g, b, a; };\n'
            '\tvoid compute(int index, int fallbackIndex, TempColorData value) {\n'
            '\t\tif (_status[index] == Status::Initial) {\n'
            '\t\t\tif (fallbackIndex >= 0 && _status[fallbackIndex] == Status::Loaded) {\n'
            '\t\t\t\t_status[index] = Status::Loaded;\n'
            '\t\t\t\tnew (data(index)) internal::ColorData(*data(fallbackIndex));\n'
            '\t\t\t} else {\n'
            '\t\t\t\t_status[index] = Status::Created;\n'
            '\t\t\t\tnew (data(index)) internal::ColorData(value.r, value.g, value.b, value.a);\n'
            '\t\t\t}\n'
            '\t\t}\n'
            '\t}\n'
            '\n'
            '\tinternal::ColorData *data(int index) {\n'
            '\t\treturn reinterpret_cast<internal::ColorData*>(_data) + index;\n'
            '\t}\n'
            '\n'
            '\tconst internal::ColorData *data(int index) const {\n'
            '\t\treturn reinterpret_cast<const internal::ColorData*>(_data) + index;\n'
            '\t}\n'
            '\n'
            '\tvoid setData(int index, const internal::ColorData &value) {\n'
            '\t\tif (_status[index] == Status::Initial) {\n'
            '\t\t\tnew (data(index)) internal::ColorData(value);\n'
            '\t\t} else {\n'
            '\t\t\t*data(index) = value;\n'
            '\t\t}\n'
            '\t\t_status[index] = Status::Loaded;\n'
            '\t}\n'
            '\n'
            '\tenum class Status {\n'
            '\t\tInitial,\n'
            '\t\tCreated,\n'
            '\t\tLoaded,\n'
            '\t};\n'
            '\n'
            f'\talignas(alignof(internal::ColorData)) char _data[sizeof(internal::ColorData) * {count}];\n'
            '\n'
            f'\tcolor _colors[{count}] = {{\n'
        )
        for i in range(count):
            header.write(f'\t\tdata({i}),\n')
        header.write(
            '\t};\n'
            f'\tStatus _status[{count}] = {{ Status::Initial }};\n'
            '\tbool _ready = false;\n'
            '\n'
            '};\n'
            '\n'
            'namespace main_palette {\n'
            '\n'
            'QByteArray save();\n'
            'bool load(const QByteArray &cache);\n'
            'bool setColor(QLatin1String name, uchar r, uchar g, uchar b, uchar a);\n'
            'bool setColor(QLatin1String name, QLatin1String from);\n'
            'void apply(const palette &other);\n'
            '\n'
            '} // namespace main_palette\n'
            '\n'
        )

    def _write_refs_declarations(self, header: SourceFile) -> None:
        if not self.module.has_variables():
            return
        header.push_namespace('st')
        for variable in self.module.variables:
            type_ = self.emitter.type_to_target_type(variable.value.type)
            header.write(f'extern const {type_} &{variable.name[-1]};\n')
        header.pop_namespace()

    # -- source ---------------------------------------------------------------

    def write_source(self) -> str:
        source = SourceFile(self.base_path + '.cpp', self.project)
        source.include(f'{self.base_name}.h')
        for include in self.module.includes:
            source.include(f'{include.base_name}.h')
        source.newline()

        if not self.module.has_variables():
            return source.render()

        source.push_namespace().newline()
        source.write('bool inited = false;\n')
        if self.is_palette:
            source.newline()
            source.write('style::palette _palette;\n')
        else:
            self._write_variable_definitions(source)
        source.newline().pop_namespace()

        source.newline().push_namespace('st')
        self._write_refs_definition(source)
        source.pop_namespace().newline().push_namespace('style')

        if self.is_palette:
            self._write_set_palette_color(source)

        source.push_namespace('internal').newline()
        self._write_variable_init(source)
        return source.render()

    def _write_variable_definitions(self, source: SourceFile) -> None:
        source.newline()
        for variable in self.module.variables:
            type_ = variable.value.type
            target = self.emitter.type_to_target_type(type_)
            source.write(f'{target} _{variable.name[-1]} = {self.emitter.default_literal(type_)};\n')

    def _write_refs_definition(self, source: SourceFile) -> None:
        for variable in self.module.variables:
            name = variable.name[-1]
            target = self.emitter.type_to_target_type(variable.value.type)
            storage = f'_palette.{name}()' if self.is_palette else f'_{name}'
            source.write(f'const {target} &{name}({storage});\n')

    def _write_set_palette_color(self, source: SourceFile) -> None:
        assert self.palette is not None
        count = self.palette.count
        source.newline()
        source.write('void palette::finalize() {\n\tif (_ready) return;\n\t_ready = true;\n\n')
        for entry in self.palette.entries:
            r, g, b, a = entry.color.rgba()
            source.write(f'\tcompute({entry.index}, {entry.fallback_index}, {{{r}, {g}, {b}, {a}}});\n')

        checksum = self.palette.checksum
        source.write(f'}}\n\nint32 palette::Checksum() {{\n\treturn {checksum};\n}}\n')

        source.newline().push_namespace().newline()
        source.write(self.palette.matcher.code())
        source.newline().pop_namespace().newline()

        source.write(
            'QByteArray palette::save() const {\n'
            '\tif (!_ready) const_cast<palette*>(this)->finalize();\n'
            '\n'
            f'\tauto result = QByteArray({count * 4}, Qt::Uninitialized);\n'
            f'\tfor (auto i = 0, index = 0; i != {count}; ++i) {{\n'
            '\t\tresult[index++] = static_cast<uchar>(data(i)->c.red());\n'
            '\t\tresult[index++] = static_cast<uchar>(data(i)->c.green());\n'
            '\t\tresult[index++] = static_cast<uchar>(data(i)->c.blue());\n'
            '\t\tresult[index++] = static_cast<uchar>(data(i)->c.alpha());\n'
            '\t}\n'
            '\treturn result;\n'
            '}\n'
            '\n'
            'bool palette::load(const QByteArray &cache) {\n'
            f'\tif (cache.size() != {count * 4}) return false;\n'
            '\n'
            '\tauto p = reinterpret_cast<const uchar*>(cache.constData());\n'
            f'\tfor (auto i = 0; i != {count}; ++i) {{\n'
            '\t\tsetData(i, { p[i * 4 + 0], p[i * 4 + 1], p[i * 4 + 2], p[i * 4 + 3] });\n'
            '\t}\n'
            '\treturn true;\n'
            '}\n'
            '\n'
            'bool palette::setColor(QLatin1String name, uchar r, uchar g, uchar b, uchar a) {\n'
            '\tauto index = getPaletteIndex(name);\n'
            '\tif (index >= 0) {\n'
            '\t\tsetData(index, { r, g, b, a });\n'
            '\t\treturn true;\n'
            '\t}\n'
            '\treturn false;\n'
            '}\n'
            '\n'
            'bool palette::setColor(QLatin1String name, QLatin1String from) {\n'
            '\tauto nameIndex = getPaletteIndex(name);\n'
            '\tauto fromIndex = getPaletteIndex(from);\n'
            '\tif (nameIndex >= 0 && fromIndex >= 0 && _status[fromIndex] == Status::Loaded) {\n'
            '\t\tsetData(nameIndex, *data(fromIndex));\n'
            '\t\treturn true;\n'
            '\t}\n'
            '\treturn false;\n'
            '}\n'
            '\n'
            'namespace main_palette {\n'
            '\n'
            'QByteArray save() {\n'
            '\treturn _palette.save();\n'
            '}\n'
            '\n'
            'bool load(const QByteArray &cache) {\n'
            '\tif (_palette.load(cache)) {\n'
            '\t\tstyle::internal::resetIcons();\n'
            '\t\treturn true;\n'
            '\t}\n'
            '\treturn false;\n'
            '}\n'
            '\n'
            'bool setColor(QLatin1String name, uchar r, uchar g, uchar b, uchar a) {\n'
            '\treturn _palette.setColor(name, r, g, b, a);\n'
            '}\n'
            '\n'
            'bool setColor(QLatin1String name, QLatin1String from) {\n'
            '\treturn _palette.setColor(name, from);\n'
            '}\n'
            '\n'
            'void apply(const palette &other) {\n'
            '\t_palette = other;\n'
            '\tstyle::internal::resetIcons();\n'
            '}\n'
            '\n'
            '} // namespace main_palette\n'
            '\n'
        )

    def _write_variable_init(self, source: SourceFile) -> None:
        if not self.tables.is_empty():
            source.push_namespace()
            self._write_px_values_init(source)
            self._write_font_families_init(source)
            self._write_icon_values(source)
            source.pop_namespace().newline()

        source.write(f'void init_{self.base_name}() {{\n\tif (inited) return;\n\tinited = true;\n\n')

        dependencies = [m for m in self.module.includes if m.has_variables()]
        for include in dependencies:
            source.write(f'\tinit_{include.base_name}();\n')
        if dependencies:
            source.newline()

        if self.tables.px_values or self.tables.font_families:
            if self.tables.px_values:
                source.write('\tinitPxValues();\n')
            if self.tables.font_families:
                source.write('\tinitFontFamilies();\n')
            source.newline()

        if self.is_palette:
            source.write('\t_palette.finalize();\n')
        else:
            for variable in self.module.variables:
                literal = self.emitter.assignment_literal(variable.value)
                source.write(f'\t_{variable.name[-1]} = {literal};\n')
        source.write('}\n\n')

    def _write_px_values_init(self, source: SourceFile) -> None:
        if not self.tables.px_values:
            return
        for value in self.tables.sorted_px_values():
            source.write(f'int {px_value_name(value)} = {value};\n')
        source.write('void initPxValues() {\n\tif (cRetina()) return;\n\n\tswitch (cScale()) {\n')
        for scale, entries in px_adjustments(self.tables.px_values, self.scales).items():
            source.write(f'\tcase {scale.target_name}:\n')
            for value, adjusted in entries:
                source.write(f'\t\t{px_value_name(value)} = {adjusted};\n')
            source.write('\tbreak;\n')
        source.write('\t}\n}\n\n')

    def _write_font_families_init(self, source: SourceFile) -> None:
        if not self.tables.font_families:
            return
        for index in self.tables.font_families.values():
            source.write(f'int font{index}index;\n')
        source.write('void initFontFamilies() {\n')
        for family, index in self.tables.font_families.items():
            encoded = string_to_encoded_string(family)
            source.write(f'\tfont{index}index = style::internal::registerFontFamily({encoded});\n')
        source.write('}\n\n')

    def _write_icon_values(self, source: SourceFile) -> None:
        for filespec, index in self.tables.icon_masks.items():
            data = icon_mask_data(filespec, self.resolve_modifier, self.icons_root)
            source.write(f'const uchar iconMask{index}Data[] = {string_to_binary_array(data)};\n')
            source.write(f'IconMask iconMask{index}(iconMask{index}Data);\n\n')

    # -- sample theme ---------------------------------------------------------

    def write_sample_theme(self) -> str:
        if self.palette is None:
            raise ValueError(f'{self.module.filepath} is not a palette module')
        return self.palette.sample_theme(Path(self.module.filepath).name)


def generate_module(
    module: Module,
    out_dir: str,
    project: ProjectInfo | None = None,
    resolve_modifier: ModifierResolver | None = None,
    icons_root: str | None = None,
    sample_theme_path: str | None = None,
    is_palette: bool | None = None,
) -> GenerationReport:
    """Render every artifact of `module` in memory, then write them all or none."""
    project = project or ProjectInfo(source=module.filepath)
    base_path = str(Path(out_dir) / module.base_name)
    generator = Generator(
        module,
        base_path,
        project,
        is_palette=is_palette,
        resolve_modifier=resolve_modifier,
        icons_root=icons_root,
    )

    artifacts = {
        base_path + '.h': generator.write_header().encode('utf-8'),
        base_path + '.cpp': generator.write_source().encode('utf-8'),
    }
    if sample_theme_path and generator.palette is not None:
        artifacts[sample_theme_path] = generator.write_sample_theme().encode('utf-8')

    report = GenerationReport(
        module_path=module.filepath,
        base_name=module.base_name,
        is_palette=generator.is_palette,
        variable_count=len(module.variables),
        px_value_count=len(generator.tables.px_values),
        font_families=list(generator.tables.font_families),
        icon_masks=list(generator.tables.icon_masks),
        checksum=generator.palette.checksum if generator.palette is not None else None,
    )
    for path, written in write_artifacts(artifacts).items():
        report.add_artifact(path, written, len(artifacts[path]))
    return report


def generate_tree(
    module: Module,
    out_dir: str,
    project_name: str = 'stylegen',
    resolve_modifier: ModifierResolver | None = None,
    icons_root: str | None = None,
    sample_theme_path: str | None = None,
) -> list[GenerationReport]:
    """Generate `module` and everything it includes, dependencies first.

    Stops at the first module that fails; modules already generated keep
    their (complete) output.
    """
    reports = []
    for current in initialization_order(module):
        reports.append(
            generate_module(
                current,
                out_dir,
                project=ProjectInfo(name=project_name, source=current.filepath),
                resolve_modifier=resolve_modifier,
                icons_root=icons_root,
                sample_theme_path=sample_theme_path if current.is_palette else None,
            )
        )
    return reports
